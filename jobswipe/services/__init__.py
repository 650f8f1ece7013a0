"""
JobSwipe services: hh.ru client and OAuth, LLM-backed cover letters and
compatibility scoring, swipes, resumes and the application pipeline.
"""
