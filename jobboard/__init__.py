"""
Job Board API
REST backend for organizations posting jobs and users applying to them.

Architecture:
- MongoDB: All records (accounts, jobs, candidates, profiles, templates, one-time codes)
- SMTP: Verification emails and template notifications to candidates
- Local disk: Uploaded pictures, resumes and company logos
"""

__version__ = "1.0.0"
