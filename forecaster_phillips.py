#!/usr/bin/env python3
"""
Phillips-curve inflation forecasts on monthly US data (FRED, 1982 onward).

Usage
-----
    python forecaster_phillips.py --help
    python forecaster_phillips.py --cutoff 2018-12
    python forecaster_phillips.py --observations-csv data/observations.csv --no-figures

The code lives in inflation_forecaster_src/; see main.py there for the
pipeline stages and CLI options.
"""

if __name__ == "__main__":
    # Import and delegate to the modular implementation
    try:
        from inflation_forecaster_src.main import main
    except ImportError as e:
        print(f"Error: Cannot import the modules: {e}")
        print("Please ensure the inflation_forecaster_src/ directory is present and its dependencies are installed.")
        raise SystemExit(1)
    main()
