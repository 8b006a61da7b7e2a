"""Errors raised by the menu services.

Views map them to HTTP status codes; nothing inside the services retries.
Database connectivity problems are not wrapped and propagate as DatabaseError.
"""

from django.core.exceptions import ObjectDoesNotExist


class MenuError(Exception):
    status_code = 500

    def __init__(self, message):
        super().__init__(message)
        self.message = message


class MenuItemNotFound(MenuError, ObjectDoesNotExist):
    status_code = 404

    def __init__(self, item_id):
        super().__init__(f'MenuItem with ID "{item_id}" not found')
        self.item_id = item_id


class MenuConflict(MenuError):
    status_code = 409


class MenuBadRequest(MenuError):
    status_code = 400
