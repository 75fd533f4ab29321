# tests/unit/services/mapping/test_category_resolver.py
import pytest

from app.services.mapping.category_resolver import CategoryResolver


@pytest.mark.asyncio
async def test_exact_mapping_is_returned_without_writes(mock_storage):
    mock_storage.add_category_mapping("Electronics/Phones", "Смартфоны", target_subject_id=515)
    resolver = CategoryResolver(mock_storage)

    result = await resolver.resolve("Electronics/Phones")

    assert result == "Смартфоны"
    assert mock_storage.writes == 0
    assert mock_storage.call_count("get_all_category_mappings") == 0


@pytest.mark.asyncio
async def test_keyword_match_is_cached_as_exact_mapping(mock_storage):
    mock_storage.add_category_mapping("Mobile", "Phones and accessories", target_subject_id=7)
    resolver = CategoryResolver(mock_storage)

    first = await resolver.resolve("Electronics/Mobile Phones")

    assert first == "Phones and accessories"
    assert mock_storage.writes == 1
    cached = await mock_storage.get_category_mapping("Electronics/Mobile Phones")
    assert cached.target_category == "Phones and accessories"
    assert cached.target_subject_id == 7

    scans = mock_storage.call_count("get_all_category_mappings")
    second = await resolver.resolve("Electronics/Mobile Phones")

    assert second == first
    assert mock_storage.writes == 1
    assert mock_storage.call_count("get_all_category_mappings") == scans


@pytest.mark.asyncio
async def test_first_matching_mapping_wins(mock_storage):
    mock_storage.add_category_mapping("A", "Kitchen appliances")
    mock_storage.add_category_mapping("B", "Kitchen textiles")
    resolver = CategoryResolver(mock_storage)

    assert await resolver.resolve("Home/Kitchen") == "Kitchen appliances"


@pytest.mark.asyncio
async def test_keyword_match_is_case_insensitive(mock_storage):
    mock_storage.add_category_mapping("Toys", "Детские ИГРУШКИ")
    resolver = CategoryResolver(mock_storage)

    assert await resolver.resolve("Игрушки/Конструкторы") == "Детские ИГРУШКИ"


@pytest.mark.asyncio
async def test_no_match_returns_input_without_writes(mock_storage):
    mock_storage.add_category_mapping("Books", "Книги")
    resolver = CategoryResolver(mock_storage)

    assert await resolver.resolve("Garden/Tools") == "Garden/Tools"
    assert mock_storage.writes == 0
    # Not cached: the next call scans again
    await resolver.resolve("Garden/Tools")
    assert mock_storage.call_count("get_all_category_mappings") == 2


@pytest.mark.asyncio
async def test_empty_category_returns_input(mock_storage):
    resolver = CategoryResolver(mock_storage)

    assert await resolver.resolve("") == ""
    assert mock_storage.writes == 0


@pytest.mark.asyncio
async def test_store_error_falls_back_to_input(mock_storage):
    mock_storage.fail_on.add("get_category_mapping")
    resolver = CategoryResolver(mock_storage)

    assert await resolver.resolve("Electronics/Phones") == "Electronics/Phones"


@pytest.mark.asyncio
async def test_failed_cache_write_falls_back_to_input(mock_storage):
    mock_storage.add_category_mapping("Mobile", "Phones")
    mock_storage.fail_on.add("create_category_mapping")
    resolver = CategoryResolver(mock_storage)

    assert await resolver.resolve("Electronics/Phones") == "Electronics/Phones"


def test_extract_keywords_splits_on_slash_then_whitespace():
    assert CategoryResolver.extract_keywords("Electronics/Mobile  Phones / ") == ["electronics", "mobile", "phones"]
    assert CategoryResolver.extract_keywords("") == []


@pytest.mark.asyncio
async def test_find_by_target_returns_lowest_id(mock_storage):
    first = mock_storage.add_category_mapping("Phones", "Смартфоны")
    mock_storage.add_category_mapping("Mobile phones", "Смартфоны")
    resolver = CategoryResolver(mock_storage)

    assert (await resolver.find_by_target("Смартфоны")).id == first.id
    assert await resolver.find_by_target("Ноутбуки") is None


@pytest.mark.asyncio
async def test_upsert_creates_then_updates(mock_storage):
    resolver = CategoryResolver(mock_storage)

    created = await resolver.upsert("Electronics/Phones", "Смартфоны", target_subject_id=515)
    updated = await resolver.upsert("Electronics/Phones", "Телефоны", target_subject_id=516, source_category_id=17)

    assert updated.id == created.id
    assert len(mock_storage.category_mappings) == 1
    assert updated.target_category == "Телефоны"
    assert updated.target_subject_id == 516
    assert updated.source_category_id == 17
