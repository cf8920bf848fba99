"""List and library listings end to end through the service layer."""

from __future__ import annotations

import uuid
from datetime import date

import pytest

from tracker.core.errors import Forbidden, InvalidPage, NotFound
from tracker.models.lists import ListPrivacy
from tracker.models.media import MediaType
from tracker.schema.items import ItemFilters, ItemSort, SortBy
from tracker.services.list_items_service import list_items
from tracker.services.query_composer import LibraryScope, ListScope
from tracker.tests.utils import (
    NOW,
    add_list,
    add_list_item,
    add_movie,
    add_progress,
    add_rating,
    add_show,
    add_user,
    mark_seen,
)


async def _list_of_movies(session, user, count: int):
    user_list = await add_list(session, user)
    for index in range(count):
        movie = await add_movie(session, f"Movie {index:02d}")
        await add_list_item(session, user_list, movie)
    return user_list


@pytest.mark.asyncio
async def test_pagination_over_thirty_seven_items(session):
    user = await add_user(session)
    user_list = await _list_of_movies(session, user, 37)
    scope = ListScope(user_list.id)

    first = await list_items(session, user.id, scope, page=1, now=NOW)
    third = await list_items(session, user.id, scope, page=3, items_per_page=15, now=NOW)

    assert (first.from_, first.to, first.total, first.total_pages) == (0, 15, 37, 3)
    assert [view.media_item.title for view in first.data] == [f"Movie {index:02d}" for index in range(15)]
    assert (third.from_, third.to, third.page) == (30, 37, 3)
    assert [view.media_item.title for view in third.data] == [f"Movie {index:02d}" for index in range(30, 37)]

    with pytest.raises(InvalidPage):
        await list_items(session, user.id, scope, page=4, now=NOW)
    with pytest.raises(InvalidPage):
        await list_items(session, user.id, scope, page=0, now=NOW)


@pytest.mark.asyncio
async def test_listing_without_page_returns_every_view(session):
    user = await add_user(session)
    user_list = await _list_of_movies(session, user, 20)

    views = await list_items(session, user.id, ListScope(user_list.id), now=NOW)

    assert isinstance(views, list)
    assert len(views) == 20
    assert {view.type for view in views} == {"movie"}


@pytest.mark.asyncio
async def test_repeated_listing_is_identical(session):
    user = await add_user(session)
    user_list = await _list_of_movies(session, user, 12)
    sort = ItemSort(sort_by=SortBy.RELEASE_DATE)

    first = await list_items(session, user.id, ListScope(user_list.id), sort=sort, page=1, now=NOW)
    second = await list_items(session, user.id, ListScope(user_list.id), sort=sort, page=1, now=NOW)

    assert first.model_dump_json() == second.model_dump_json()


@pytest.mark.asyncio
async def test_episode_membership_never_reports_a_season_view(session):
    user = await add_user(session)
    user_list = await add_list(session, user)
    show = await add_show(session, "Redundant", [(1, 1, date(2024, 1, 1)), (1, 2, date(2024, 1, 2))])
    await add_list_item(session, user_list, show.item, season=show.seasons[1], episode=show.episodes[(1, 2)])
    await add_list_item(session, user_list, show.item, season=show.seasons[1])

    views = await list_items(session, user.id, ListScope(user_list.id), now=NOW)
    by_type = {view.type: view for view in views}

    assert set(by_type) == {"episode", "season"}
    assert by_type["episode"].season is None
    assert by_type["episode"].episode.id == show.episodes[(1, 2)].id
    assert by_type["season"].episode is None
    assert by_type["season"].season.id == show.seasons[1].id
    assert by_type["season"].media_item.id == show.id


@pytest.mark.asyncio
async def test_season_rating_does_not_populate_show_rating(session):
    user = await add_user(session)
    user_list = await add_list(session, user)
    show = await add_show(session, "Rated", [(1, 1, date(2024, 1, 1))])
    await add_list_item(session, user_list, show.item)
    await add_list_item(session, user_list, show.item, season=show.seasons[1])
    await add_rating(session, user, show.item, 7, season=show.seasons[1])

    views = await list_items(session, user.id, ListScope(user_list.id), now=NOW)
    by_type = {view.type: view for view in views}

    assert by_type["tv"].media_item.user_rating is None
    assert by_type["season"].media_item.user_rating is None
    assert by_type["season"].season.user_rating.rating == 7


@pytest.mark.asyncio
async def test_show_view_carries_episode_aggregates(session):
    user = await add_user(session)
    user_list = await add_list(session, user)
    show = await add_show(
        session,
        "Airing",
        [(1, 1, date(2024, 1, 1)), (1, 2, date(2024, 1, 8)), (1, 3, date(2024, 7, 1))],
    )
    await add_list_item(session, user_list, show.item)
    await mark_seen(session, user, show.item, episode=show.episodes[(1, 1)])

    [view] = await list_items(session, user.id, ListScope(user_list.id), now=NOW)

    assert view.type == "tv"
    assert view.media_item.aired_episodes_count == 2
    assert view.media_item.seen_episodes_count == 1
    assert view.media_item.unseen_episodes_count == 1
    assert view.media_item.seen is False
    assert view.media_item.first_unwatched_episode.id == show.episodes[(1, 2)].id
    assert view.media_item.upcoming_episode.id == show.episodes[(1, 3)].id
    assert view.media_item.total_runtime == 60


@pytest.mark.asyncio
async def test_library_scope_collects_listed_seen_and_rated_items(session):
    user = await add_user(session)
    other = await add_user(session, prefix="other")
    user_list = await add_list(session, user)
    listed = await add_movie(session, "Listed")
    seen = await add_movie(session, "Seen")
    rated = await add_movie(session, "Rated")
    foreign = await add_movie(session, "Foreign")
    await add_list_item(session, user_list, listed)
    await mark_seen(session, user, seen)
    await add_rating(session, user, rated, 9)
    await mark_seen(session, other, foreign)

    views = await list_items(session, user.id, LibraryScope(), now=NOW)

    assert [view.media_item.title for view in views] == ["Listed", "Rated", "Seen"]
    listed_view = views[0]
    assert listed_view.listed_at is not None
    assert views[1].listed_at is None


@pytest.mark.asyncio
async def test_unreleased_items_are_hidden_by_default(session):
    user = await add_user(session)
    user_list = await add_list(session, user)
    await add_list_item(session, user_list, await add_movie(session, "Released", release_date=date(2024, 6, 15)))
    await add_list_item(session, user_list, await add_movie(session, "Unreleased", release_date=date(2024, 6, 16)))
    scope = ListScope(user_list.id)

    default = await list_items(session, user.id, scope, now=NOW)
    everything = await list_items(session, user.id, scope, ItemFilters(include_unreleased_items=True), now=NOW)

    assert [view.media_item.title for view in default] == ["Released"]
    assert [view.media_item.title for view in everything] == ["Released", "Unreleased"]


@pytest.mark.asyncio
async def test_stored_column_filters(session):
    user = await add_user(session)
    watchlist = await add_list(session, user, name="Watchlist", is_watchlist=True)
    user_list = await add_list(session, user)
    movie = await add_movie(session, "Movie")
    show = await add_show(session, "Show", [(1, 1, date(2024, 1, 1))])
    rated = await add_movie(session, "Rated")
    started = await add_movie(session, "Started")
    for item in (movie, show.item, rated, started):
        await add_list_item(session, user_list, item)
    await add_list_item(session, watchlist, movie)
    await add_rating(session, user, rated, 6)
    await add_progress(session, user, started, 0.5)
    scope = ListScope(user_list.id)

    async def titles(filters: ItemFilters) -> list[str]:
        return [view.media_item.title for view in await list_items(session, user.id, scope, filters, now=NOW)]

    assert await titles(ItemFilters(media_type=MediaType.TV)) == ["Show"]
    assert await titles(ItemFilters(only_on_watchlist=True)) == ["Movie"]
    assert await titles(ItemFilters(only_with_user_rating=True)) == ["Rated"]
    assert await titles(ItemFilters(only_without_user_rating=True)) == ["Movie", "Show", "Started"]
    assert await titles(ItemFilters(only_with_progress=True)) == ["Started"]


@pytest.mark.asyncio
async def test_watch_state_filters_run_after_resolution(session):
    user = await add_user(session)
    user_list = await add_list(session, user)
    finished = await add_show(session, "Finished", [(1, 1, date(2024, 1, 1))])
    started = await add_show(session, "Started", [(1, 1, date(2024, 1, 1)), (1, 2, date(2024, 1, 2))])
    airing = await add_show(session, "Airing", [(1, 1, date(2024, 1, 1)), (1, 2, date(2024, 8, 1))])
    for show in (finished, started, airing):
        await add_list_item(session, user_list, show.item)
    await mark_seen(session, user, finished.item, episode=finished.episodes[(1, 1)])
    await mark_seen(session, user, started.item, episode=started.episodes[(1, 1)])
    scope = ListScope(user_list.id)

    async def titles(filters: ItemFilters) -> list[str]:
        return [view.media_item.title for view in await list_items(session, user.id, scope, filters, now=NOW)]

    assert await titles(ItemFilters(only_seen_items=True)) == ["Finished"]
    assert await titles(ItemFilters(only_unseen_items=True)) == ["Airing", "Started"]
    assert await titles(ItemFilters(only_with_next_airing=True)) == ["Airing"]
    assert await titles(ItemFilters(only_with_next_episodes_to_watch=True)) == ["Started"]

    page = await list_items(session, user.id, scope, ItemFilters(only_unseen_items=True), page=1, now=NOW)
    assert (page.total, page.total_pages, page.to) == (2, 1, 2)


@pytest.mark.asyncio
async def test_list_visibility(session):
    owner = await add_user(session, prefix="owner")
    visitor = await add_user(session, prefix="visitor")
    private = await add_list(session, owner, name="Private")
    public = await add_list(session, owner, name="Public", privacy=ListPrivacy.PUBLIC)
    await add_list_item(session, public, await add_movie(session, "Shared"))

    with pytest.raises(Forbidden):
        await list_items(session, visitor.id, ListScope(private.id), now=NOW)
    with pytest.raises(NotFound):
        await list_items(session, visitor.id, ListScope(uuid.uuid4()), now=NOW)

    views = await list_items(session, visitor.id, ListScope(public.id), now=NOW)
    assert [view.media_item.title for view in views] == ["Shared"]
    assert views[0].media_item.seen is False
