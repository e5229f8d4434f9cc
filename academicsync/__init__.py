"""
academicsync: normalize academic records from the transcript and portal back-ends.
"""
