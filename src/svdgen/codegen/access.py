from __future__ import annotations

from svdgen.svd.model import Access, Field, RegisterInfo


def classify_access(info: RegisterInfo) -> Access:
    """Effective access of a register.

    An explicit register-level access wins. Otherwise the fields decide: all
    read-only or all write-only fields make the register the same; any mix, or
    any field without an access, makes it read-write.
    """
    if info.access is not None:
        return info.access
    if info.fields:
        if all(f.access is Access.READ_ONLY for f in info.fields):
            return Access.READ_ONLY
        if all(f.access is Access.WRITE_ONLY for f in info.fields):
            return Access.WRITE_ONLY
    return Access.READ_WRITE


def field_access(field: Field, info: RegisterInfo) -> Access:
    if field.access is not None:
        return field.access
    return classify_access(info)
