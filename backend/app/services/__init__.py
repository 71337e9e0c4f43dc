# Services package init
"""
Userbase Backend — Services Layer
===================================

What:  Business layer sitting between routes (HTTP) and repositories (SQL).
How:   Each service operation runs inside one unit of work and returns
       Pydantic schemas, never ORM rows.

Service Inventory:
    - UserService: find_all, find_one, get, find_by_email, save, create, delete
"""
