from dishka import Provider as DishkaProvider

from pds.util.di.scope import Scope


class Provider(DishkaProvider):
    """Base for PDS providers. Unannotated provides default to APP scope."""

    scope = Scope.APP
