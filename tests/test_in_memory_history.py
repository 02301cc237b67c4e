from src.infrastructure.persistence.in_memory_history import InMemoryChatHistoryStore


def test_keeps_only_the_most_recent_messages():
    store = InMemoryChatHistoryStore(max_messages=4)
    for i in range(3):
        store.append_exchange("u1", f"q{i}", f"a{i}")

    assert [m.content for m in store.recent("u1", 10)] == ["q1", "a1", "q2", "a2"]
    assert [m.content for m in store.recent("u1", 1)] == ["a2"]
    assert store.recent("u1", 0) == []


def test_users_are_isolated_and_counted():
    store = InMemoryChatHistoryStore()
    store.append_exchange("u1", "hi", "hello")
    store.append_exchange("u2", "hey", "hello")

    assert store.active_users() == 2
    assert store.clear("u1") is True
    assert store.recent("u1") == []
    assert store.active_users() == 1
    assert store.clear("u1") is False
