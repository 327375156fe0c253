# itsm_portal/backend/app/api/__init__.py
