"""
Student Portal Backend
Community platform for students and recruiters.

Architecture:
- MongoDB: users, students, jobs, notifications, documents, tickets, posts
- JWT auth with role-based access (USER, COMPANY, SUPPORT, ADMIN, SUPER_ADMIN)
- Job postings fan out dashboard notifications to students by qualification
"""

__version__ = "1.0.0"
