"""
Course Outcome (CO) marks calculator: exam setup validation and CO-wise mark aggregation.
"""
