"""Resolution of the user the driver runs as."""

from __future__ import annotations

import getpass
import grp
import os
import pwd
from typing import Protocol

from ..config import DriverConfig
from ..exceptions import IdentityResolutionError
from ..models.identity import Identity, UserGroup

__all__ = [
    "IdentityResolver",
    "StaticIdentityResolver",
    "SystemIdentityResolver",
    "validate_identity",
]


class IdentityResolver(Protocol):
    """Source of the identity of the submitting user."""

    def resolve(self, config: DriverConfig) -> Identity:
        """Determine the user name, UID, and groups for the driver.

        Parameters
        ----------
        config
            Driver configuration, which may override the user name or UID.

        Returns
        -------
        Identity
            Resolved identity. Missing pieces are returned empty rather than
            raising an exception.
        """


class StaticIdentityResolver:
    """Identity resolver that always returns the same identity.

    Configuration overrides of the user name and UID still apply.

    Parameters
    ----------
    identity
        Identity to return.
    """

    def __init__(self, identity: Identity) -> None:
        self._identity = identity

    def resolve(self, config: DriverConfig) -> Identity:
        update = {}
        if config.user_name:
            update["username"] = config.user_name
        if config.user_id:
            update["uid"] = config.user_id
        return self._identity.model_copy(update=update)


class SystemIdentityResolver:
    """Identity resolver using the local user and group databases.

    The user name defaults to the user running this process. The UID and
    groups are looked up by name, so a configured user name that does not
    exist locally resolves to an empty UID and group list.
    """

    def resolve(self, config: DriverConfig) -> Identity:
        username = config.user_name or getpass.getuser()
        try:
            entry = pwd.getpwnam(username)
        except KeyError:
            return Identity(username=username, uid=config.user_id or "")

        uid = config.user_id or str(entry.pw_uid)
        groups = []
        for gid in os.getgrouplist(username, entry.pw_gid):
            try:
                name = grp.getgrgid(gid).gr_name
            except KeyError:
                name = str(gid)
            groups.append(UserGroup(name=name, id=str(gid)))
        return Identity(username=username, uid=uid, groups=groups)


def validate_identity(identity: Identity) -> Identity:
    """Check that an identity is usable for the driver container.

    Parameters
    ----------
    identity
        Identity returned by an `IdentityResolver`.

    Returns
    -------
    Identity
        The same identity.

    Raises
    ------
    IdentityResolutionError
        Raised if the UID or the list of group IDs is empty.
    """
    if not identity.uid or not identity.group_ids:
        raise IdentityResolutionError(identity.username)
    return identity
