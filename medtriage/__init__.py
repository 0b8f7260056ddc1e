"""
medtriage — Message Analysis & Triage Engine.

Privacy: No raw message content in logs. Labels, counts and urgency only.
"""

__version__ = '1.0.0'
