"""
HTTP API for submitting and polling analyses
"""
