"""
Solat Qada Tracker - Source Package

A personal tracker for clearing a backlog of missed prayers (Qada)
against weekly targets, with a local cache and optional sync to a
per-user remote document.

DESIGN PRINCIPLES:
1. Local first: the on-device cache is never behind what the user saw
2. Bad input is clamped, never rejected
3. Cycle resets are detected on every load and mutation, not scheduled
4. Remote sync is last-writer-wins and never blocks an edit
5. Storage and delivery channels are swappable
"""

__version__ = "1.0.0"
__author__ = "Solat Qada Tracker Team"
