from sql_gate.sql_rewriter import add_table_prefix, rewrite_sql, split_string_literals


def test_no_tables_or_no_prefix_is_noop():
    sql = "SELECT * FROM users"
    assert rewrite_sql(sql, [], "arpg_").sql == sql
    assert rewrite_sql(sql, None, "arpg_").sql == sql
    assert rewrite_sql(sql, ["users"], "").sql == sql
    assert rewrite_sql(sql, ["users"], "").applied == ()


def test_prefixes_simple_table():
    out = rewrite_sql("SELECT * FROM users", ["users"], "arpg_")
    assert out.sql == "SELECT * FROM arpg_users"
    assert out.applied == ("users",)


def test_prefixes_multiple_tables_and_qualified_columns():
    out = rewrite_sql(
        "SELECT users.id, posts.title FROM users JOIN posts ON users.id = posts.user_id",
        ["users", "posts"],
        "arpg_",
    )
    assert out.sql == (
        "SELECT arpg_users.id, arpg_posts.title FROM arpg_users "
        "JOIN arpg_posts ON arpg_users.id = arpg_posts.user_id"
    )


def test_quoted_table_names():
    out = rewrite_sql(
        'SELECT * FROM `users` JOIN "posts" ON users.id = posts.user_id',
        ["users", "posts"],
        "arpg_",
    )
    assert "`arpg_users`" in out.sql
    assert '"arpg_posts"' in out.sql
    assert "arpg_users.id = arpg_posts.user_id" in out.sql


def test_quoted_names_match_exactly():
    out = rewrite_sql("SELECT * FROM `users` JOIN `user` ON 1 = 1", ["user"], "arpg_")
    assert out.sql == "SELECT * FROM `users` JOIN `arpg_user` ON 1 = 1"

    out = rewrite_sql('SELECT * FROM "somename"', ["name"], "arpg_")
    assert out.sql == 'SELECT * FROM "somename"'


def test_substrings_are_never_prefixed():
    sql = (
        "SELECT * FROM users JOIN users_post ON users.id = users_post.user_id "
        "JOIN comments_users ON users.id = comments_users.user_id"
    )
    out = rewrite_sql(sql, ["users", "users_post", "comments_users"], "arpg_")
    assert out.sql == (
        "SELECT * FROM arpg_users JOIN arpg_users_post ON arpg_users.id = arpg_users_post.user_id "
        "JOIN arpg_comments_users ON arpg_users.id = arpg_comments_users.user_id"
    )
    assert "arpg_arpg_" not in out.sql


def test_substring_table_only_declared_once():
    out = rewrite_sql("SELECT * FROM users_post JOIN comments_users", ["users"], "arpg_")
    assert out.sql == "SELECT * FROM users_post JOIN comments_users"


def test_string_literals_are_untouched():
    out = rewrite_sql("SELECT * FROM status WHERE type = 'status'", ["status"], "arpg_")
    assert out.sql == "SELECT * FROM arpg_status WHERE type = 'status'"


def test_escaped_quotes_inside_literals():
    sql = "SELECT * FROM status WHERE name = 'O\\'Reilly' AND type = 'status'"
    out = rewrite_sql(sql, ["status"], "arpg_")
    assert out.sql == "SELECT * FROM arpg_status WHERE name = 'O\\'Reilly' AND type = 'status'"


def test_quoted_name_inside_literal_is_untouched():
    out = rewrite_sql("SELECT * FROM users WHERE note = 'see `users`'", ["users"], "arpg_")
    assert out.sql == "SELECT * FROM arpg_users WHERE note = 'see `users`'"


def test_aliases_are_untouched():
    out = rewrite_sql("SELECT u.id, u.name FROM users AS u WHERE u.active = 1", ["users"], "arpg_")
    assert out.sql == "SELECT u.id, u.name FROM arpg_users AS u WHERE u.active = 1"


def test_schema_qualifier_is_kept():
    out = rewrite_sql(
        "SELECT * FROM public.users JOIN posts ON users.id = posts.user_id",
        ["users", "posts"],
        "app_",
    )
    assert out.sql == "SELECT * FROM public.app_users JOIN app_posts ON app_users.id = app_posts.user_id"


def test_schema_qualified_table_spec():
    out = rewrite_sql("SELECT * FROM public.users", ["public.users"], "arpg_")
    assert out.sql == "SELECT * FROM arpg_public.users"


def test_already_prefixed_table_is_skipped():
    out = rewrite_sql("SELECT * FROM arpg_users", ["arpg_users"], "arpg_")
    assert out.sql == "SELECT * FROM arpg_users"
    assert out.applied == ()


def test_second_pass_with_prefixed_names_is_noop():
    once = rewrite_sql("SELECT * FROM users JOIN posts", ["users", "posts"], "arpg_").sql
    twice = rewrite_sql(once, ["arpg_users", "arpg_posts"], "arpg_").sql
    assert once == twice == "SELECT * FROM arpg_users JOIN arpg_posts"


def test_duplicate_table_names_prefix_once():
    out = rewrite_sql("SELECT * FROM users", ["users", "users"], "arpg_")
    assert out.sql == "SELECT * FROM arpg_users"


def test_missing_table_is_silent_noop():
    out = rewrite_sql("SELECT * FROM posts", ["users"], "arpg_")
    assert out.sql == "SELECT * FROM posts"


def test_regex_metacharacters_in_names_are_literal():
    assert add_table_prefix("SELECT * FROM a.b JOIN axb", "a.b", "p_") == "SELECT * FROM p_a.b JOIN axb"


def test_split_string_literals_segments():
    assert split_string_literals("a = 'x' AND b = 'y'") == [
        (False, "a = "),
        (True, "'x'"),
        (False, " AND b = "),
        (True, "'y'"),
    ]


def test_split_string_literals_escapes_and_doubled_quotes():
    assert split_string_literals("'O\\'Reilly' x") == [(True, "'O\\'Reilly'"), (False, " x")]
    assert split_string_literals("'O''Reilly'") == [(True, "'O'"), (True, "'Reilly'")]


def test_split_string_literals_unterminated_literal_runs_to_end():
    assert split_string_literals("SELECT 'users FROM users") == [
        (False, "SELECT "),
        (True, "'users FROM users"),
    ]
    out = rewrite_sql("SELECT * FROM users WHERE a = 'users", ["users"], "arpg_")
    assert out.sql == "SELECT * FROM arpg_users WHERE a = 'users"


def test_split_string_literals_round_trips_text():
    sql = "SELECT 'a\\\\' , '', 'it''s' FROM t WHERE x = '\\''"
    assert "".join(text for _, text in split_string_literals(sql)) == sql
    assert split_string_literals("") == []
