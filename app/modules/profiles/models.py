# Supabase tables: profile, auth.users
# This file documents the expected database schema
# Actual operations are handled via Supabase SDK in service.py
# Authentication is handled by Supabase Auth (auth.users table)

"""
Expected Supabase table structure:

profile:
- id: uuid (primary key, references auth.users.id ON DELETE CASCADE)
- full_name: text (nullable)
- role_id: text (not null, default 'client') - one of client, admin, owner
- plan: text (not null, default 'free') - one of free, pro, enterprise
- created_at: timestamp (default: now())
- updated_at: timestamp (nullable)

Note: email, password and confirmation state live in auth.users and are
only reachable through the service role (auth.admin API). Deleting the
auth user removes the profile row through the foreign key cascade.
RLS is expected to let a signed-in user select and insert their own row.
"""
