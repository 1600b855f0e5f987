"""CLI entry point - wrapper so the tool runs from a checkout

    python oauth2_cli.py -auth https://provider/authorize -token https://provider/token -id ID -secret SECRET
"""

from cli.main import main

if __name__ == "__main__":
    main()
