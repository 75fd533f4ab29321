# tests/unit/services/mapping/test_attribute_resolver.py
import pytest

from app.services.mapping.attribute_resolver import AttributeResolver, derive_attribute_id, humanize_attribute_id


@pytest.mark.parametrize("name,expected", [
    ("Color", "color"),
    ("Screen Size (in)", "screen_size_in"),
    ("  Weight, kg ", "weight_kg"),
    ("Цвет товара", "цвет_товара"),
    ("snake_case__name", "snake_case_name"),
    ("---", ""),
])
def test_derive_attribute_id(name, expected):
    assert derive_attribute_id(name) == expected


def test_humanize_attribute_id():
    assert humanize_attribute_id("screen_size") == "Screen Size"


@pytest.mark.asyncio
async def test_unseen_attribute_creates_one_mapping(mock_storage):
    resolver = AttributeResolver(mock_storage)
    attributes = {"9048": {"name": "Screen Size", "value": "6.1"}}

    first = await resolver.resolve(attributes, "Electronics/Phones")

    assert first == {"screen_size": "6.1"}
    assert len(mock_storage.attribute_mappings) == 1
    mapping = next(iter(mock_storage.attribute_mappings.values()))
    assert mapping.source_attribute_id == "9048"
    assert mapping.target_attribute_name == "Screen Size"
    assert mapping.category_id is None

    writes = mock_storage.writes
    second = await resolver.resolve(attributes, "Electronics/Phones")

    assert second == first
    assert len(mock_storage.attribute_mappings) == 1
    assert mock_storage.writes == writes


@pytest.mark.asyncio
async def test_auto_created_mapping_is_scoped_to_known_category(mock_storage):
    category = mock_storage.add_category_mapping("Electronics/Phones", "Смартфоны")
    resolver = AttributeResolver(mock_storage)

    await resolver.resolve({"85": {"name": "Brand", "value": "Acme"}}, "Electronics/Phones")

    mapping = next(iter(mock_storage.attribute_mappings.values()))
    assert mapping.category_id == category.id


@pytest.mark.asyncio
async def test_category_scoped_mapping_wins_over_global(mock_storage):
    category = mock_storage.add_category_mapping("Electronics/Phones", "Смартфоны")
    mock_storage.add_attribute_mapping("10096", "color_global", "Color", "Color")
    mock_storage.add_attribute_mapping("10096", "phone_color", "Color", "Phone color", category_id=category.id)
    resolver = AttributeResolver(mock_storage)

    result = await resolver.resolve({"10096": {"name": "Color", "value": "black"}}, "Electronics/Phones")

    assert result == {"phone_color": "black"}


@pytest.mark.asyncio
async def test_global_mapping_used_when_category_has_none(mock_storage):
    mock_storage.add_category_mapping("Electronics/Phones", "Смартфоны")
    mock_storage.add_attribute_mapping("10096", "color_global", "Color", "Color")
    resolver = AttributeResolver(mock_storage)

    result = await resolver.resolve({"10096": {"name": "Color", "value": "black"}}, "Electronics/Phones")

    assert result == {"color_global": "black"}
    assert len(mock_storage.attribute_mappings) == 1


@pytest.mark.asyncio
async def test_missing_names_are_backfilled(mock_storage):
    mapping = mock_storage.add_attribute_mapping("4180", "title")
    resolver = AttributeResolver(mock_storage)

    await resolver.resolve({"4180": {"name": "Name", "value": "Phone X"}}, None)

    assert mapping.source_attribute_name == "Name"
    assert mapping.target_attribute_name == "title"


@pytest.mark.asyncio
async def test_list_values_are_passed_through(mock_storage):
    resolver = AttributeResolver(mock_storage)

    result = await resolver.resolve({"1": {"name": "Colors", "value": ["red", "blue"]}}, None)

    assert result == {"colors": ["red", "blue"]}


@pytest.mark.asyncio
async def test_failing_attribute_is_omitted(mock_storage):
    resolver = AttributeResolver(mock_storage)
    original = mock_storage.get_attribute_mapping

    async def flaky(source_attribute_id, category_id=None):
        if source_attribute_id == "bad":
            raise RuntimeError("connection lost")
        return await original(source_attribute_id, category_id)

    mock_storage.get_attribute_mapping = flaky

    result = await resolver.resolve(
        {
            "1": {"name": "Brand", "value": "Acme"},
            "bad": {"name": "Broken", "value": "x"},
            "2": {"name": "Model", "value": "X1"},
        },
        None,
    )

    assert result == {"brand": "Acme", "model": "X1"}


@pytest.mark.asyncio
async def test_empty_attributes_resolve_to_empty(mock_storage):
    resolver = AttributeResolver(mock_storage)

    assert await resolver.resolve({}, "Electronics") == {}
    assert await resolver.resolve(None, "Electronics") == {}
    assert mock_storage.writes == 0


@pytest.mark.asyncio
async def test_reverse_uses_existing_mapping(mock_storage):
    mock_storage.add_attribute_mapping("10096", "color", "Цвет", "Color")
    resolver = AttributeResolver(mock_storage)

    result = await resolver.resolve_reverse({"color": {"name": "color", "value": "black"}}, "Смартфоны")

    assert result == {"10096": {"name": "Цвет", "value": "black"}}
    assert mock_storage.writes == 0


@pytest.mark.asyncio
async def test_reverse_prefers_category_mappings(mock_storage):
    category = mock_storage.add_category_mapping("Electronics/Phones", "Смартфоны")
    mock_storage.add_attribute_mapping("1", "color", "Color (global)", "Color")
    mock_storage.add_attribute_mapping("2", "color", "Color (phones)", "Color", category_id=category.id)
    resolver = AttributeResolver(mock_storage)

    result = await resolver.resolve_reverse({"color": "black"}, "Смартфоны")

    assert result == {"2": {"name": "Color (phones)", "value": "black"}}


@pytest.mark.asyncio
async def test_reverse_auto_creates_humanized_mapping(mock_storage):
    resolver = AttributeResolver(mock_storage)

    result = await resolver.resolve_reverse({"screen_size": {"name": "screen_size", "value": "6.1"}}, None)

    assert result == {"screen_size": {"name": "Screen Size", "value": "6.1"}}
    mapping = next(iter(mock_storage.attribute_mappings.values()))
    assert mapping.source_attribute_id == "screen_size"
    assert mapping.target_attribute_id == "screen_size"
    assert mapping.source_attribute_name == "Screen Size"


@pytest.mark.asyncio
async def test_reverse_backfills_target_name(mock_storage):
    mapping = mock_storage.add_attribute_mapping("10096", "color", "Цвет", "")
    resolver = AttributeResolver(mock_storage)

    await resolver.resolve_reverse({"color": "black"}, None)

    assert mapping.target_attribute_name == "color"


@pytest.mark.asyncio
async def test_unusable_attribute_is_left_out(mock_storage):
    resolver = AttributeResolver(mock_storage)

    resolved = await resolver.resolve(
        {
            "85": {"name": "Brand", "value": "Acme"},
            "9": {"name": "Size", "value": {"min": 1, "max": 2}},
        },
        None,
    )

    assert resolved == {"brand": "Acme"}
    assert [m.source_attribute_id for m in mock_storage.attribute_mappings.values()] == ["85"]


@pytest.mark.asyncio
async def test_reverse_skips_unusable_values_and_unwraps_nested_value(mock_storage):
    resolver = AttributeResolver(mock_storage)

    resolved = await resolver.resolve_reverse(
        {
            "color": "black",
            "size": {"name": "Size", "value": {"min": 1}},
            "material": {"name": "Material", "value": {"value": "steel"}},
        },
        "Смартфоны",
    )

    assert resolved == {
        "color": {"name": "Color", "value": "black"},
        "material": {"name": "Material", "value": "steel"},
    }
