"""Business domains - one package per dashboard area"""
