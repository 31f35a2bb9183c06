"""
Utility Scripts.

- setup_supabase.py: Print schema, migration and drop SQL; verify tables

Run scripts with: python -m scripts.<script_name>
"""
