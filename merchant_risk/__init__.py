"""
Merchant Risk Engine - Credit-Risk Scoring & Reserve Recommendation Service

A FastAPI-based service that scores merchant accounts from windowed
behavioral signals, classifies them into risk tiers, and recommends
reserve policies.
"""

__version__ = "0.1.0"
