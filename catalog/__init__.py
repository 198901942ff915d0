#/project/catalog/__init__.py

"""
ISC License

Copyright (c) 2023 Eric Chickering <eric.chickering@gmail.com>

Permission to use, copy, modify, and/or distribute this software for any
purpose with or without fee is hereby granted, provided that the above
copyright notice and this permission notice appear in all copies.

THE SOFTWARE IS PROVIDED "AS IS" AND THE AUTHOR DISCLAIMS ALL WARRANTIES
WITH REGARD TO THIS SOFTWARE INCLUDING ALL IMPLIED WARRANTIES OF
MERCHANTABILITY AND FITNESS. IN NO EVENT SHALL THE AUTHOR BE LIABLE FOR
ANY SPECIAL, DIRECT, INDIRECT, OR CONSEQUENTIAL DAMAGES OR ANY DAMAGES
WHATSOEVER RESULTING FROM LOSS OF USE, DATA OR PROFITS, WHETHER IN AN ACTION
OF CONTRACT, NEGLIGENCE OR OTHER TORTIOUS ACTION, ARISING OUT OF OR IN
CONNECTION WITH THE USE OR PERFORMANCE OF THIS SOFTWARE.

"""
from catalog.models import (
    ADDRESS,
    ADDRESS_GROUP,
    APPLICATION,
    APPLICATION_GROUP,
    OBJECT_TYPES,
    SERVICE,
    SERVICE_GROUP,
    SHARED,
    Address,
    AddressGroup,
    Application,
    Catalog,
    DeviceGroup,
    MemberGroup,
    ScopeObjects,
    Service,
    Zone,
)
from catalog.builder import CatalogBuilder
from catalog.result import Result, Tally
