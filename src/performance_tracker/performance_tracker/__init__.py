"""Performance Tracker package.

Daily task checklists, admin-confirmed scoring and leaderboards, organized by
feature modules (dailyforms, scoring, leaderboard, employees) with a thin Flask
controller layer over service/repository layers.
"""
