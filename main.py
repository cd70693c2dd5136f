#!/usr/bin/env python3
"""
File I/O Benchmark Tool
Write / rewrite / read / reread throughput with concurrent threads
"""
import sys

from fileio_bench.cli import main


if __name__ == '__main__':
    sys.exit(main())
