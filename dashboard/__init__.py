"""Operations dashboard API for the home-services booking business"""
