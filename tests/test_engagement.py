import pytest

from hotzones.models import AIStatus, AIVideoMetadata, Comment

from .conftest import START_MS


def test_new_video_starts_with_zero_reactions(store, add_video):
    video = add_video()
    counts = store.engagement.get_reactions(video.id)
    assert (counts.eyes, counts.risky, counts.resolved, counts.unclear) == (0, 0, 0, 0)


def test_reaction_increments_by_one(store, add_video):
    video = add_video()
    store.engagement.add_reaction(video.id, "eyes")
    counts = store.engagement.add_reaction(video.id, "eyes")
    assert counts.eyes == 2
    assert counts.risky == 0


def test_reaction_returns_snapshot(store, add_video):
    video = add_video()
    counts = store.engagement.add_reaction(video.id, "risky")
    counts.risky = 100
    assert store.engagement.get_reactions(video.id).risky == 1


def test_reaction_engagement_ttl_boundary(store, clock, settings, add_video):
    video = add_video()
    clock.advance(settings.VIDEO_TTL_MS)
    assert store.engagement.add_reaction(video.id, "eyes") is not None
    clock.advance(1)
    assert store.engagement.add_reaction(video.id, "eyes") is None


def test_reaction_counts_hidden_after_engagement_ttl(store, clock, settings, add_video):
    video = add_video()
    store.engagement.add_reaction(video.id, "eyes")

    clock.advance(settings.VIDEO_TTL_MS)
    assert store.engagement.get_reactions(video.id).eyes == 1
    clock.advance(1)
    assert store.engagement.get_reactions(video.id) is None


def test_reaction_on_missing_video(store):
    assert store.engagement.add_reaction("video-missing", "eyes") is None
    assert store.engagement.get_reactions("video-missing") is None


def test_unknown_reaction_type(store, add_video):
    video = add_video()
    with pytest.raises(ValueError):
        store.engagement.add_reaction(video.id, "love")


def test_vote_toggle_sequence(store, add_video):
    video = add_video()
    votes = store.engagement.cast_vote(video.id, "up", "none")
    assert (votes.upvotes, votes.downvotes) == (1, 0)

    votes = store.engagement.cast_vote(video.id, "down", "up")
    assert (votes.upvotes, votes.downvotes) == (0, 1)

    votes = store.engagement.cast_vote(video.id, "none", "down")
    assert (votes.upvotes, votes.downvotes) == (0, 0)


def test_vote_never_goes_negative(store, add_video):
    video = add_video()
    votes = store.engagement.cast_vote(video.id, "none", "up")
    assert (votes.upvotes, votes.downvotes) == (0, 0)


def test_votes_use_storage_ttl(store, clock, settings, add_video):
    video = add_video()
    clock.advance(settings.VIDEO_TTL_MS + 1)
    assert store.engagement.cast_vote(video.id, "up", "none") is not None
    clock.advance(settings.VIDEO_STORAGE_TTL_MS - settings.VIDEO_TTL_MS - 1)
    assert store.engagement.cast_vote(video.id, "up", "none") is not None
    clock.advance(1)
    assert store.engagement.cast_vote(video.id, "up", "none") is None


def test_get_votes_defaults_to_zero(store):
    votes = store.engagement.get_votes("video-unknown")
    assert (votes.upvotes, votes.downvotes) == (0, 0)


def test_comments_newest_first_and_hidden_after_ttl(store, clock, settings, add_video):
    video = add_video()
    store.engagement.add_comment(Comment("c1", video.id, "s1", "first", START_MS))
    store.engagement.add_comment(Comment("c2", video.id, "s1", "second", START_MS + 5))
    assert [c.id for c in store.engagement.comments_for_video(video.id)] == ["c2", "c1"]
    assert store.engagement.last_comment_timestamp("s1") == START_MS + 5
    assert store.engagement.last_comment_timestamp("s2") is None

    clock.advance(settings.VIDEO_TTL_MS + 1)
    assert store.engagement.comments_for_video(video.id) == []


def test_ai_metadata_status_transitions(store):
    assert store.ai_metadata.status("v1") == AIStatus.NONE
    store.ai_metadata.mark_pending("v1")
    assert store.ai_metadata.status("v1") == AIStatus.PENDING

    store.ai_metadata.set(AIVideoMetadata.failure("v1", "analysis_failed", "boom", START_MS, "test-model"))
    assert store.ai_metadata.status("v1") == AIStatus.ERROR

    store.ai_metadata.set(
        AIVideoMetadata(
            video_id="v1",
            summary="Quiet street",
            tags=["street"],
            counts={"people": "0", "vehicles": "1-3"},
            activity_level="low",
            confidence=0.9,
            analyzed_at=START_MS,
            model_version="test-model",
        )
    )
    assert store.ai_metadata.status("v1") == AIStatus.AVAILABLE
    assert len(store.ai_metadata) == 1
