# Services package init
"""
CaseFamily Backend: Services Layer
=====================================

What:  Business logic between routes (HTTP) and the document store.
How:   Each service receives the DocumentStore in its constructor; none of
       them holds a module-level connection.

Service Inventory:
    - RelativeResolver: relation records → {id, fullName, relationship}
    - ClientQueryService: list, search, family view
    - ClientMutationService: create, update, cascade delete
    - RelationshipService: add, replace-all, delete relations
"""
