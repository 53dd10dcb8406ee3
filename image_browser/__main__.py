import sys

from image_browser.main import run

sys.exit(run())
