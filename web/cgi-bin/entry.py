#!/data/.venv/bin/python3

import sys

from join_system.cgi_wrapper import run_cgi

if __name__ == "__main__":
    sys.exit(run_cgi())
