# itsm_portal/backend/app/services/__init__.py
