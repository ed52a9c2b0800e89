"""
TaskBoard Backend — Services Layer
====================================

Service Inventory:
    - TaskService: task CRUD scoped to the calling user
    - AuthService: registration, login, password hashing, JWT handling
    - FileService: upload validation, storage, and cleanup
"""
