class DictIO:
    @staticmethod
    def GetAlternative(dictionary, keyword, default):
        dictionary = {key.lower() if isinstance(key, str) else key: value for key, value in dictionary.items()}
        keyword_lower = keyword.lower() if isinstance(keyword, str) else keyword
        if keyword_lower in dictionary:
            return dictionary[keyword_lower]
        return default

    @staticmethod
    def unknown(dictionary, known):
        known = [keyword.lower() for keyword in known]
        return [key for key in dictionary if not isinstance(key, str) or key.lower() not in known]
