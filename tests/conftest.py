"""Shared pytest fixtures for all tests."""
import pytest
from pathlib import Path

FIXTURES_DIR = Path(__file__).parent / "fixtures" / "schemas"


@pytest.fixture(scope="session")
def blog_dump_sql():
    """mysqldump-style schema with keys and constraints added by ALTER TABLE."""
    return (FIXTURES_DIR / "blog_dump.sql").read_text(encoding="utf-8")


@pytest.fixture
def users_posts_sql():
    """Two tables linked by a table-level FOREIGN KEY."""
    return (
        "CREATE TABLE users (id BIGINT PRIMARY KEY AUTO_INCREMENT, name VARCHAR(50));\n"
        "CREATE TABLE posts (id BIGINT PRIMARY KEY, user_id BIGINT, "
        "FOREIGN KEY (user_id) REFERENCES users(id));\n"
    )


@pytest.fixture
def student_course_sql():
    """Two entities and a pure join table between them."""
    return """
    CREATE TABLE students (id BIGINT PRIMARY KEY, name VARCHAR(100));
    CREATE TABLE courses (id BIGINT PRIMARY KEY, title VARCHAR(100));
    CREATE TABLE student_course (
        student_id BIGINT,
        course_id BIGINT,
        FOREIGN KEY(student_id) REFERENCES students(id),
        FOREIGN KEY(course_id) REFERENCES courses(id)
    );
    """
