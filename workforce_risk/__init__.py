"""
Workforce Risk.

Employment risk assessments built from live workforce data:
career classification, risk scoring, salary estimation, hiring signals
and an LLM-written narrative, plus a tool-using follow-up chat.
"""

__version__ = "0.1.0"
