# kardex/utils/__init__.py
