import uvicorn

from milk_ledger.config import HOST, PORT

if __name__ == "__main__":
    uvicorn.run("milk_ledger.main:app", host=HOST, port=PORT)
