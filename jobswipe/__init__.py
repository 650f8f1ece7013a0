"""JobSwipe core: hh.ru client, LLM generators, store and application pipeline."""
