"""
covex package
=============

covex is a small offline engine for exploring COVID-19 deaths and
vaccinations data.

- Table loading (CSV / Excel -> records) is in `covex/loader.py`.
- Grouping and summing is in `covex/engine.py`.
- Rates and fatality levels are in `covex/metrics.py` and `covex/classify.py`.
- The named report views are in `covex/views.py`.
"""

__version__ = '0.1.0'
