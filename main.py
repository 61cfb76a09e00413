import sys

from bubbletrack.cli import console

if __name__ == '__main__':
    sys.exit(console())
