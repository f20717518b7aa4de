"""Allow ``python -m dumpbench [DUMP] [BENCHMARKS...]``."""

from dumpbench.cli.main import run_main

if __name__ == "__main__":
    run_main()
