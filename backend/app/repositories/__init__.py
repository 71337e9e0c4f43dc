# Repositories package init
"""
Userbase Backend — Persistence Layer
======================================

What:  Data-access classes that turn entity operations into SQL.
How:   Each repository wraps one AsyncSession handed to it by unit_of_work();
       it flushes but never commits. Transaction boundaries belong to the
       service layer.

Repository Inventory:
    - UserRepository: find_all, find_one, find_by_email, save, delete, count
"""
