"""
SquashAnalyzer — Live squash match tracking and tactical analysis
=================================================================
Point-by-point scoring with zone and shot tagging, rally timing,
and coaching insight derived from the recorded match.
"""

__version__ = "1.0.0"
__app_name__ = "SquashAnalyzer"
