"""
Portfolio Tracker (folio-tracker)

Values a lump-sum stock portfolio over time. Given an allocation plan and
price quotes for its symbols, computes each holding's value and the total
portfolio value on every quoted date, carrying values forward across gaps,
and assembles the result into series ready for charting.
"""

__version__ = "0.1.0"
__author__ = "Portfolio Tracker Team"
