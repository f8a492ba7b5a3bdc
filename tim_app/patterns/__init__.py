"""
Price pattern construction and cheap price detection.

Compiles currency format settings into cached regular expressions and
answers the fast "could this text hold a price" question.
"""
