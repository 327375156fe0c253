# itsm_portal/backend/app/__init__.py
