import pytest

from movie_api.core.errors import Conflict, NotFound
from movie_api.db.crud.base import Repository
from movie_api.db.crud.favorites import FavoriteRepository
from movie_api.db.crud.movies import MovieRepository
from movie_api.db.crud.reviews import ReviewRepository
from movie_api.db.models import Movie


@pytest.mark.asyncio
async def test_generic_repository_crud(session, make_movie):
    repo = Repository(session, Movie)
    movie = await make_movie()

    assert (await repo.read(movie.id)).title == "ocean waves"

    updated = await repo.update(movie.id, {"title": "calm sea", "not_a_column": 1})
    assert updated.title == "calm sea"

    assert [m.id for m in await repo.list(author="Jane Doe")] == [movie.id]
    assert await repo.list(author="Nobody") == []

    deleted = await repo.delete(movie.id)
    assert deleted.id == movie.id
    with pytest.raises(NotFound):
        await repo.read(movie.id)


@pytest.mark.asyncio
async def test_missing_ids_are_not_found(session):
    repo = Repository(session, Movie)
    with pytest.raises(NotFound):
        await repo.update(999, {"title": "x"})
    with pytest.raises(NotFound):
        await repo.delete(999)


@pytest.mark.asyncio
async def test_unique_violation_maps_to_conflict(session, make_movie):
    await make_movie(pexels_id=42)
    with pytest.raises(Conflict):
        await make_movie(pexels_id=42)
    # Session is usable again after the rollback
    assert await MovieRepository(session).find_by_pexels_id(42) is not None


@pytest.mark.asyncio
async def test_find_by_pexels_id(session, make_movie):
    movie = await make_movie(pexels_id=7)
    movies = MovieRepository(session)
    assert (await movies.find_by_pexels_id(7)).id == movie.id
    assert await movies.find_by_pexels_id(8) is None


@pytest.mark.asyncio
async def test_average_rating(session, make_user, make_movie):
    reviews = ReviewRepository(session)
    movie = await make_movie()
    assert await reviews.average_rating(movie.id) == 0

    ana = await make_user("ana@example.com")
    bob = await make_user("bob@example.com")
    await reviews.crud.create({"user_id": ana, "movie_id": movie.id, "comment": "Nice", "rating": 3})
    await reviews.crud.create({"user_id": bob, "movie_id": movie.id, "comment": "Great", "rating": 5})
    assert await reviews.average_rating(movie.id) == 4


@pytest.mark.asyncio
async def test_second_review_for_same_pair_is_conflict(session, make_user, make_movie):
    reviews = ReviewRepository(session)
    movie = await make_movie()
    ana = await make_user()
    await reviews.crud.create({"user_id": ana, "movie_id": movie.id, "comment": "First", "rating": 4})

    # Skips the pre-check, as a concurrent request would
    with pytest.raises(Conflict):
        await reviews.crud.create({"user_id": ana, "movie_id": movie.id, "comment": "Again", "rating": 2})


@pytest.mark.asyncio
async def test_review_queries(session, make_user, make_movie):
    reviews = ReviewRepository(session)
    m1, m2 = await make_movie(1), await make_movie(2)
    ana = await make_user()
    await reviews.crud.create({"user_id": ana, "movie_id": m1.id, "comment": "One", "rating": 4})
    await reviews.crud.create({"user_id": ana, "movie_id": m2.id, "comment": "Two", "rating": 2})

    assert len(await reviews.list_by_user(ana)) == 2
    by_movie = await reviews.list_by_movie(m1.id)
    assert [r.comment for r in by_movie] == ["One"]
    assert by_movie[0].user.email == "ana@example.com"

    updated = await reviews.update_by_user_and_movie(ana, m2.id, {"rating": 5})
    assert updated.rating == 5 and updated.comment == "Two"
    assert await reviews.update_by_user_and_movie(ana, 999, {"rating": 1}) is None

    assert await reviews.delete_by_user(ana) == 2
    assert await reviews.list_by_user(ana) == []


@pytest.mark.asyncio
async def test_favorites_by_user_include_movie(session, make_user, make_movie):
    favorites = FavoriteRepository(session)
    movie = await make_movie(title="forest walk")
    ana = await make_user()
    fav = await favorites.crud.create({"user_id": ana, "movie_id": movie.id})

    listed = await favorites.list_by_user(ana)
    assert [f.id for f in listed] == [fav.id]
    assert listed[0].movie.title == "forest walk"
    assert (await favorites.find_by_user_and_movie(ana, movie.id)).id == fav.id

    with pytest.raises(Conflict):
        await favorites.crud.create({"user_id": ana, "movie_id": movie.id})
