from __future__ import annotations
from typing import Dict, List, Optional, Tuple

import pytest

from address_recon.providers import ProviderAdapter


class FakeProvider(ProviderAdapter):
    """Scripted provider: answers from ``answers`` keyed by (address, hint) or address."""

    def __init__(self, name: str, answers: Optional[Dict] = None, default=None,
                 quota: bool = True, raises: Optional[Exception] = None):
        self.name = name
        super().__init__()
        self.answers = answers or {}
        self.default = default
        self.quota = quota
        self.raises = raises
        self.calls: List[Tuple[str, Optional[str]]] = []

    def has_quota(self) -> bool:
        return self.quota

    def geocode(self, address, hint=None, cancel=None):
        self.calls.append((address, hint))
        self.state.request_counter += 1
        if self.raises is not None:
            raise self.raises
        if (address, hint) in self.answers:
            return self.answers[(address, hint)]
        if hint is None and address in self.answers:
            return self.answers[address]
        return self.default


@pytest.fixture
def fake_provider():
    return FakeProvider
