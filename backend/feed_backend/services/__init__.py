# Services package init
"""
Feed Backend — Services Layer
===============================

What:  Business logic between routes (HTTP) and the database.

Service Inventory:
    - PostStore:    Repository over the posts table (injected per request)
    - ImageService: Image Intake: MIME filter and timestamp-named storage
    - FeedService:  Validation and the list/create workflows
"""
