# SPDX-License-Identifier: MIT

from clocklet.initialize import initialize
from clocklet.terminal.app import run


def main() -> None:
    initialize()
    run()


if __name__ == "__main__":
    main()
