# itsm_portal/__init__.py
