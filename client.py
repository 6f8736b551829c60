# client.py
import argparse
import sys

from PyQt6.QtWidgets import QApplication

from config import SERVER_HOST, SERVER_PORT
from gui import ChatClientGUI


def parse_args(argv=None):
    parser = argparse.ArgumentParser(description="LineChat client")
    parser.add_argument("--host", default=SERVER_HOST, help="peer host (default: %(default)s)")
    parser.add_argument("--port", type=int, default=SERVER_PORT, help="peer port (default: %(default)s)")
    return parser.parse_known_args(argv)


def main():
    args, qt_args = parse_args()
    # Remaining arguments are passed through to Qt
    app = QApplication([sys.argv[0]] + qt_args)

    window = ChatClientGUI(args.host, args.port)
    window.show()
    window.on_connect_clicked()
    sys.exit(app.exec())


if __name__ == "__main__":
    main()
