#!/usr/bin/env python3
"""
bucketwire command-line runner

Send one signed request to an S3 or OSS compatible endpoint.

Usage:
    python run.py GET my-bucket key.txt          # Use config.json
    python run.py -c custom.json GET my-bucket   # Use custom config
    python run.py --trace GET                    # List buckets, dump traffic
    python run.py PUT my-bucket key.txt -d hi    # Upload text
"""

import sys
from bucketwire.cli import main

if __name__ == "__main__":
    sys.exit(main())
