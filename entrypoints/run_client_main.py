import sys
import traceback

from ecflow_light.cli import main as cli_main


def main():
    try:
        # Equivalent to: python -m ecflow_light.cli
        sys.exit(cli_main(sys.argv[1:]))
    except Exception:
        traceback.print_exc()
        sys.exit(1)


if __name__ == "__main__":
    main()
