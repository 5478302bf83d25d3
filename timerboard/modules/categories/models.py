# Supabase tables: fleet_categories, category_access_grants
# This file documents the expected database schema
# Actual operations are handled via Supabase SDK in timerboard/database/identity_store.py

"""
Expected Supabase table structure:

fleet_categories:
- id: bigint (primary key, identity)
- guild_id: bigint (not null)
- name: text (not null)
- cooldown_seconds: integer (nullable)
- reminder_seconds: integer (nullable)
- created_at: timestamp (default: now())

category_access_grants:
- category_id: bigint (foreign key to fleet_categories.id, on delete cascade)
- role_id: bigint (foreign key to guild_roles.role_id, on delete cascade)
- can_view: boolean (not null, default: false)
- can_create: boolean (not null, default: false)
- can_manage: boolean (not null, default: false)
- unique constraint on (category_id, role_id)

Writes to category_access_grants use upsert on (category_id, role_id) so a
second grant for the same pair overwrites the first.
"""
