"""
SEO Page Analyzer

Usage:
    python audit.py run https://example.com
    python audit.py status <analysis-id>
"""

import sys

from auditor.cli import main

if __name__ == "__main__":
    sys.exit(main())
