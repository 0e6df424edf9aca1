"""Property-based tests for layered options merging."""

from __future__ import annotations

import pytest

hypothesis = pytest.importorskip("hypothesis")
from hypothesis import given, settings, strategies as st

from ai_adapters.core.options import merge_layers, merge_options, set_fields
from ai_adapters.models.options import ChatOptions

chat_options = st.builds(
    ChatOptions,
    model=st.none() | st.sampled_from(["gpt-4o", "gpt-4o-mini", "o1-mini"]),
    temperature=st.none() | st.floats(min_value=0.0, max_value=2.0),
    max_tokens=st.none() | st.integers(min_value=1, max_value=4096),
    top_p=st.none() | st.floats(min_value=0.0, max_value=1.0),
    stop=st.none() | st.lists(st.text(min_size=1, max_size=5), max_size=3),
    user=st.none() | st.text(min_size=1, max_size=10),
)


class TestMergeProperties:
    @given(base=chat_options, override=chat_options)
    @settings(max_examples=200, deadline=None)
    def test_set_override_fields_win(self, base: ChatOptions, override: ChatOptions) -> None:
        merged = merge_options(base, override)
        for name, value in set_fields(override).items():
            assert getattr(merged, name) == value

    @given(base=chat_options, override=chat_options)
    @settings(max_examples=200, deadline=None)
    def test_unset_override_fields_fall_through(
        self, base: ChatOptions, override: ChatOptions
    ) -> None:
        merged = merge_options(base, override)
        for name in ChatOptions.model_fields:
            if getattr(override, name) is None:
                assert getattr(merged, name) == getattr(base, name)

    @given(base=chat_options, override=chat_options)
    @settings(max_examples=100, deadline=None)
    def test_inputs_untouched(self, base: ChatOptions, override: ChatOptions) -> None:
        before = (base.model_dump(), override.model_dump())
        merge_options(base, override)
        assert (base.model_dump(), override.model_dump()) == before

    @given(a=chat_options, b=chat_options, c=chat_options)
    @settings(max_examples=100, deadline=None)
    def test_layers_fold_left_to_right(self, a: ChatOptions, b: ChatOptions, c: ChatOptions) -> None:
        folded = merge_layers(a, b, c)
        stepwise = merge_options(merge_options(a, b), c)
        assert folded.model_dump() == stepwise.model_dump()

    @given(options=chat_options)
    @settings(max_examples=100, deadline=None)
    def test_none_layers_are_identity(self, options: ChatOptions) -> None:
        assert merge_layers(None, options, None) is options
