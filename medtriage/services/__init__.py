"""
medtriage/services — external voice / EHR seams and their offline stubs.
"""
