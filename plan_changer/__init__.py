"""
Launtel plan-change automation: portal session flows and a timezone-aware trigger scheduler.
"""
