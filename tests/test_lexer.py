from liminaldb.lexer import Lexer, Token, TokenType, lookup_ident

T = TokenType


def _types(text):
    return [t.type for t in Lexer(text)]


def test_select_tokens():
    assert _types("select * from t where id <= 2.5;") == [
        T.SELECT, T.MULTIPLY, T.FROM, T.IDENT, T.WHERE, T.IDENT,
        T.LESS_THAN_OR_EQ, T.FLOAT, T.SEMICOLON, T.EOF,
    ]


def test_literals_keep_text():
    toks = list(Lexer("'John Doe' 42 @user_id true >= >"))
    assert toks[0] == Token(T.STRING, "John Doe")
    assert toks[1] == Token(T.INT, "42")
    assert toks[2] == Token(T.VARIABLE, "@user_id")
    assert toks[3] == Token(T.BOOL, "true")
    assert toks[4] == Token(T.GREATER_THAN_OR_EQ, ">=")
    assert toks[5] == Token(T.GREATER_THAN, ">")


def test_type_keywords_share_values():
    assert T.INTTYPE is T.INT
    assert _types("int string(10)")[:5] == [T.INT, T.STRING, T.LPAREN, T.INT, T.RPAREN]


def test_unterminated_string_and_illegal():
    toks = list(Lexer("'abc"))
    assert toks == [Token(T.STRING, "abc"), Token(T.EOF, "")]
    assert list(Lexer("!"))[0] == Token(T.ILLEGAL, "!")


def test_eof_repeats():
    lex = Lexer("x")
    assert lex.next_token() == Token(T.IDENT, "x")
    assert lex.next_token().type is T.EOF
    assert lex.next_token().type is T.EOF


def test_lookup_ident_case_insensitive():
    assert lookup_ident("SeLeCt") is T.SELECT
    assert lookup_ident("TRUE") is T.BOOL
    assert lookup_ident("users") is T.IDENT