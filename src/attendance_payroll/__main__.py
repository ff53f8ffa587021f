"""Entry point for ``python -m attendance_payroll``."""

import sys

from attendance_payroll.cli import main

if __name__ == "__main__":
    sys.exit(main())
