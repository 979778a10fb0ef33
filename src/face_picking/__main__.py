"""Entry point for face_picking package"""

import sys

from face_picking.main import main

if __name__ == "__main__":
    sys.exit(main())
