"""
SimplifyHR Recruitment Platform
Job posting, application tracking, AI-assisted screening and interviewing,
interview scheduling and hiring analytics.

Architecture:
- PostgreSQL: Structured data (users, companies, vendors, jobs, applications,
  interview rounds and schedules, offer workflows)
- MongoDB: Documents (AI interview transcripts, JD generations, offer template files)
- OpenAI-compatible AI: JD generation, screening, interview chat, realtime tokens
"""

__version__ = "1.0.0"
