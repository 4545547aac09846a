"""Tax Calc - Personal income tax computation for single and batch submissions."""

__version__ = "0.1.0"
