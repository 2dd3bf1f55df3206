from datetime import datetime, timezone
import pytest
from shortener.exceptions import ValidationError, ConflictError
from shortener.services.shortening import create_short_link, is_absolute_url

class FakeRepository:
    def __init__(self, existing_urls=(), taken_codes=(), commit_error=None):
        self.existing_urls = set(existing_urls)
        self.taken_codes = set(taken_codes)
        self.commit_error = commit_error
        self.checked_codes = []
        self.added = []
        self.commits = 0

    async def original_url_exists(self, original_url):
        return original_url in self.existing_urls

    async def short_code_exists(self, short_code):
        self.checked_codes.append(short_code)
        return short_code in self.taken_codes

    def add(self, link):
        self.added.append(link)

    async def commit(self):
        self.commits += 1
        if self.commit_error:
            raise self.commit_error

class SequenceGenerator:
    def __init__(self, *codes):
        self.codes = list(codes)
        self.calls = 0

    def generate(self):
        self.calls += 1
        return self.codes.pop(0)

@pytest.mark.asyncio
async def test_malformed_url_is_rejected():
    repository = FakeRepository()
    generator = SequenceGenerator("abc")

    with pytest.raises(ValidationError, match="Invalid URL format"):
        await create_short_link(repository, "not_a_url", 1, generator=generator)

    assert generator.calls == 0
    assert repository.added == []

@pytest.mark.asyncio
async def test_existing_url_conflicts_before_generating():
    repository = FakeRepository(existing_urls={"https://google.com"})
    generator = SequenceGenerator("abc")

    with pytest.raises(ConflictError, match="already exists"):
        await create_short_link(repository, "https://google.com", 1, generator=generator)

    assert generator.calls == 0
    assert repository.checked_codes == []
    assert repository.commits == 0

@pytest.mark.asyncio
async def test_regenerates_until_code_is_free():
    repository = FakeRepository(taken_codes={"dup"})
    generator = SequenceGenerator("dup", "unique")
    now = datetime(2025, 12, 1, 12, 0, tzinfo=timezone.utc)

    link = await create_short_link(repository, "https://example.com", 7, generator=generator, now=now)

    assert repository.checked_codes == ["dup", "unique"]
    assert repository.added == [link]
    assert repository.commits == 1
    assert link.short_code == "unique"
    assert link.original_url == "https://example.com"
    assert link.creator_id == 7
    assert link.created_at == now
    assert link.visit_count == 0
    assert link.last_accessed_at is None

@pytest.mark.asyncio
async def test_keeps_retrying_past_many_collisions():
    taken = [f"c{i}" for i in range(25)]
    repository = FakeRepository(taken_codes=taken)
    generator = SequenceGenerator(*taken, "free")

    link = await create_short_link(repository, "https://example.com/x", 1, generator=generator)

    assert link.short_code == "free"
    assert generator.calls == 26

@pytest.mark.asyncio
async def test_late_unique_violation_surfaces_as_conflict():
    repository = FakeRepository(commit_error=ConflictError("Short link already exists"))
    generator = SequenceGenerator("raced")

    with pytest.raises(ConflictError):
        await create_short_link(repository, "https://example.com/race", 1, generator=generator)

    # No retry after the persist step fails
    assert generator.calls == 1
    assert repository.commits == 1

@pytest.mark.asyncio
async def test_other_persistence_failures_propagate():
    repository = FakeRepository(commit_error=RuntimeError("connection lost"))

    with pytest.raises(RuntimeError, match="connection lost"):
        await create_short_link(repository, "https://example.com/down", 1, generator=SequenceGenerator("abc"))

@pytest.mark.asyncio
async def test_uses_random_generator_by_default():
    repository = FakeRepository()
    link = await create_short_link(repository, "https://example.com/default", 1)
    assert 1 <= len(link.short_code) <= 11

@pytest.mark.parametrize("url", [
    "https://example.com",
    "http://localhost:8000/path?q=1#frag",
    "ftp://files.example.com/a.txt",
    "mailto:someone@example.com",
    "urn:isbn:0451450523",
    "https://example.com/a%20b?q=%C3%A9",
])
def test_absolute_urls_accepted(url):
    assert is_absolute_url(url)

@pytest.mark.parametrize("url", [
    "",
    "not_a_url",
    "/relative/path",
    "example.com/no-scheme",
    "https://",
    "http:///missing-host",
    "https://exa mple.com",
    "https://example.com/\nnext",
    "1http://example.com",
    "https://example.com:99999",
    "https://example.com/" + "a" * 2048,
    "https://example.com/<script>",
    "https://example.com/a\"b",
    "http://example.com\\evil",
    "https://exa^mple.com/",
    "https://example.com/{x}|`",
    "https://example.com/caf\u00e9",
    "https://example.com/%zz",
    "https://example.com/100%",
])
def test_malformed_urls_rejected(url):
    assert not is_absolute_url(url)
