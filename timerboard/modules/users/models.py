# Supabase tables: users, user_guilds
# This file documents the expected database schema
# Actual operations are handled via Supabase SDK in timerboard/database/identity_store.py

"""
Expected Supabase table structure:

users:
- id: bigint (primary key) - Discord account id
- name: text (nullable) - display name captured at login
- is_admin: boolean (not null, default: false) - global override
- created_at: timestamp (default: now())

user_guilds:
- user_id: bigint (foreign key to users.id, on delete cascade)
- guild_id: bigint (not null)
- unique constraint on (user_id, guild_id)

Rows are created on first login and by the Discord sync feed. This service
only flips is_admin; it never deletes users.
"""
